"""
Tests unitaires pour OperationLogger et LogDescriptionBuilder.
"""

from unittest.mock import patch

from sqlmodel import Session

from src.core.value_objects import EntityType, WatchStatus
from src.services.operation_logger import (
    SYSTEM_OPERATOR,
    UNKNOWN_OPERATOR,
    LogAction,
    LogDescriptionBuilder,
    OperationLogger,
)


class TestLogDescriptionBuilder:
    def test_single(self) -> None:
        assert (
            LogDescriptionBuilder.single("Updated", EntityType.MOVIE, "盗梦空间")
            == 'Updated movie "盗梦空间"'
        )

    def test_watch_status(self) -> None:
        text = LogDescriptionBuilder.watch_status(
            EntityType.TV_SHOW, "绝命毒师", WatchStatus.UNWATCHED, "WATCHED"
        )
        assert text == 'Updated TV show "绝命毒师" watch status from Unwatched to Watched'

    def test_rating_variants(self) -> None:
        assert "Set movie" in LogDescriptionBuilder.rating(EntityType.MOVIE, "x", None, 8.0)
        assert "Removed movie" in LogDescriptionBuilder.rating(EntityType.MOVIE, "x", 8.0, None)
        assert "from 8.0 to 9.0" in LogDescriptionBuilder.rating(EntityType.MOVIE, "x", 8.0, 9.0)

    def test_visibility(self) -> None:
        assert LogDescriptionBuilder.visibility(EntityType.MOVIE, "x", False).endswith("hidden")

    def test_batch(self) -> None:
        assert LogAction.BATCH_UPDATE_STATUS == "BATCH_UPDATE_STATUS"
        assert (
            LogDescriptionBuilder.batch("updated status of", EntityType.MOVIE, "x", 3)
            == 'Batch updated status of movie "x" (3 items)'
        )


class TestOperationLogger:
    """Tests pour OperationLogger.log()."""

    def test_system_operation(self, session: Session) -> None:
        entry = OperationLogger(session).log(LogAction.SCHEDULED_BACKUP, EntityType.SYSTEM)

        assert entry.operator_name == SYSTEM_OPERATOR
        assert entry.description == "SCHEDULED_BACKUP SYSTEM"

    def test_operator_resolved_from_user(self, session: Session, make_user) -> None:
        user = make_user("alice", name="Alice")

        entry = OperationLogger(session).log(LogAction.LOGIN, EntityType.USER, user_id=user.id)

        assert entry.user_id == user.id
        assert entry.operator_name == "Alice"

    def test_unknown_user(self, session: Session) -> None:
        entry = OperationLogger(session).log(LogAction.LOGIN, EntityType.USER, user_id=999)
        assert entry.operator_name == UNKNOWN_OPERATOR

    def test_resource_snapshot_from_entity_id(self, session: Session, make_movie) -> None:
        """La ressource est resolue et son instantane embarque."""
        movie = make_movie(tmdb_id=27205, title="盗梦空间")

        entry = OperationLogger(session).log(
            LogAction.UPDATE_CONTENT, EntityType.MOVIE, entity_id=movie.id
        )

        assert entry.resource_id == movie.id
        assert entry.resource_name == "盗梦空间"
        assert entry.resource_type == "MOVIE"
        assert entry.log_metadata == {"tmdbId": 27205, "contentType": "movie"}

    def test_failure_is_swallowed(self, session: Session) -> None:
        """Une erreur d'ecriture n'interrompt pas l'operation appelante."""
        oplog = OperationLogger(session)
        with patch.object(oplog._logs, "add", side_effect=RuntimeError("db down")):
            assert oplog.log(LogAction.LOGIN, EntityType.USER) is None
