from app.services.providers.base import VideoProvider
from app.services.providers.cms import CmsProvider, infer_media_type
from app.services.providers.hongguo import HongguoProvider

__all__ = ["CmsProvider", "HongguoProvider", "VideoProvider", "infer_media_type"]
