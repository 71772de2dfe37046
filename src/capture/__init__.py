from src.capture.screen_capture import ScreenCapture

__all__ = ["ScreenCapture"]
