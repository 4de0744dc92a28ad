from contentguard.moderation.api.events import router

__all__ = ["router"]
