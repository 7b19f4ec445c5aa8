from .registry import DeviceTrustRegistry, compute_risk_score
