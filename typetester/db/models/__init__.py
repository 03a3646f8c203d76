from typetester.db.models.font_asset import FontAsset

__all__ = ["FontAsset"]
