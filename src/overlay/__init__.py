from src.overlay.calibration_overlay import CalibrationOverlay

__all__ = ["CalibrationOverlay"]
