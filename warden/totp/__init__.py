from .engine import TotpEngine, TotpSecret
