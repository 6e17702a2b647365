"""
Adaptateurs de stockage objet.

- OSSStorage : bucket Aliyun OSS (images et sauvegardes)
- generate_file_path : cle "{type}/{id}.{ext}" des uploads manuels
"""

from src.adapters.storage.oss_storage import OSSStorage, generate_file_path

__all__ = ["OSSStorage", "generate_file_path"]
