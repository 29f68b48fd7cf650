from .service import ConversionService, get_conversion_service
from .models import ConversionResult, TargetFormat, UploadedImage

__all__ = ["ConversionService", "get_conversion_service", "ConversionResult", "TargetFormat", "UploadedImage"]
