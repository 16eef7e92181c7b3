from .signals import StagnationTracker, FocusBiasDetector, StrategicSignals

__all__ = ["StagnationTracker", "FocusBiasDetector", "StrategicSignals"]
