"""
Constantes partagees de Watch List.
"""

# Nombre de membres du casting importes pour chaque contenu
CAST_IMPORT_LIMIT = 10

# Casting et contenus similaires affiches sur une fiche publique
DETAIL_CAST_LIMIT = 10
SIMILAR_LIMIT = 10

# Pagination par defaut
SEARCH_PAGE_SIZE = 12
LOGS_PAGE_SIZE = 20
ADMIN_PAGE_SIZE = 20

# Tailles d'images TMDB utilisees par le pipeline d'images
POSTER_SIZE = "w500"
BACKDROP_SIZE = "w1280"
PROFILE_SIZE = "w276_and_h350_face"

# Types MIME acceptes a l'upload manuel
ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

# Bornes des notes
REVIEW_RATING_MIN = 1
REVIEW_RATING_MAX = 10
DOUBAN_RATING_MAX = 10.0
