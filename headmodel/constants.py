"""
Configuration constants for the multilayer-sphere Berg fit.

Radii are normalized to the outermost shell (R[NL] = 1.0). The request
caps bound the size of payloads accepted by the HTTP service; the residual
evaluator itself applies no limits.

IMPORTANT: No unicode characters allowed in this file (Windows charmap constraint).
"""

# Magnitude factor of the anchor dipole (lam[1]). Dipole 1 carries the
# reference eccentricity mu[1] and no independent weight.
BERG_ANCHOR_MAGNITUDE = 0.0

# Normalized three-shell radii (brain, skull, scalp), innermost first
DEFAULT_RADII = (0.88, 0.93, 1.0)

# Request caps for the HTTP service
MAX_SERIES_TERMS = 200
MAX_BERG_DIPOLES = 10
MAX_BATCH_CANDIDATES = 1000
