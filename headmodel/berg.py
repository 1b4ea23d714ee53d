"""
Berg parameter residual for the multilayer-sphere EEG forward model.

A single dipole inside a sphere of NL concentric conductive shells is
approximated by J dipoles inside a single homogeneous shell (Berg &
Scherg; Zhang, Phys. Med. Biol. 40, pp335-349, 1995, Eq 5i). The Berg
parameters are packed into one vector of length 2J-1:

    berg = [mu_1, ..., mu_J, lam_2, ..., lam_J]

mu_j are eccentricity factors, lam_j magnitude factors, and lam_1 is fixed
at zero (dipole 1 is the anchor). For each Legendre term n = 2..nmax the
Berg series is matched against the true multilayer weights f_n:

    term0(n) = sum_{j=2..J} lam_j * (mu_j^(n-1) - mu_1^(n-1))
    term1(n) = (R_1/R_NL)^(n-1) * (f_n - f_1*mu_1^(n-1) - term0(n))
    delta    = sum_{n=2..nmax} term1(n)^2

delta is handed to an external minimizer (e.g. scipy.optimize.minimize),
which proposes new berg vectors until it converges.

Inputs are taken as given: no shape checks, no physical range checks.
Arithmetic is IEEE double (numpy float64), so a zero outer radius
produces inf/nan in the result instead of raising.

IMPORTANT: No unicode characters allowed in this file (Windows charmap constraint).
"""

import numpy as np

from headmodel.constants import BERG_ANCHOR_MAGNITUDE


def n_berg_dipoles(berg):
    """Number of Berg dipoles J inferred from len(berg) = 2J-1."""
    return (len(berg) + 1) // 2


def split_berg(berg):
    """
    Split a packed Berg vector into eccentricity and magnitude factors.

    Parameters
    ----------
    berg : sequence of float
        Packed vector [mu_1..mu_J, lam_2..lam_J].

    Returns
    -------
    tuple of numpy.ndarray
        (mu, lam), both of length J. lam[0] is the anchor magnitude (0.0).
    """
    J = n_berg_dipoles(berg)
    mu = np.array([berg[i] for i in range(J)], dtype=np.float64)
    lam = np.array(
        [BERG_ANCHOR_MAGNITUDE] + [berg[i] for i in range(J, 2 * J - 1)],
        dtype=np.float64,
    )
    return mu, lam


def residual_terms(berg, R, f):
    """
    Per-term weighted residuals term1(n) for n = 2..nmax.

    This is the residual vector a least-squares minimizer works with;
    berg_residual() is the ascending sum of its squares.

    Parameters
    ----------
    berg : sequence of float
        Packed Berg vector of length 2J-1.
    R : sequence of float
        Shell radii, innermost first. Only R[0] and R[-1] are used.
    f : sequence of float
        Series weights f_1..f_nmax of the true multilayer solution.

    Returns
    -------
    list of float
        nmax-1 values (empty when nmax = 1).
    """
    nmax = len(f)
    mu, lam = split_berg(berg)
    J = len(mu)

    # Geometric attenuation of term n is (R_1/R_NL)^(n-1)
    shell_ratio = np.float64(R[0]) / np.float64(R[-1])
    f1 = np.float64(f[0])

    terms = []
    for n in range(2, nmax + 1):
        p = n - 1
        mu1_p = mu[0] ** p

        term0 = np.float64(0.0)
        for j in range(1, J):
            term0 = term0 + lam[j] * (mu[j] ** p - mu1_p)

        ratio = shell_ratio ** p
        term1 = ratio * (np.float64(f[n - 1]) - f1 * mu1_p - term0)
        terms.append(float(term1))
    return terms


def berg_residual(berg, R, f):
    """
    Sum-of-squares misfit between the Berg series and the true weights.

    Parameters
    ----------
    berg : sequence of float
        Packed Berg vector [mu_1..mu_J, lam_2..lam_J], length 2J-1.
    R : sequence of float
        Shell radii (any units), innermost to outermost.
    f : sequence of float
        Legendre series weights; f[0] is the true-dipole reference term.

    Returns
    -------
    float
        delta >= 0; 0.0 when len(f) == 1. inf or nan when R[-1] == 0.
    """
    return sum_of_squares(residual_terms(berg, R, f))


def sum_of_squares(terms):
    """Accumulate term1^2 in ascending n, the order the misfit is defined in."""
    delta = 0.0
    for term1 in terms:
        delta = delta + term1 * term1
    return delta


def _column_power(col, p):
    """col**p element by element through the float64 scalar power of residual_terms()."""
    return np.array([x ** p for x in col], dtype=np.float64)


def berg_residual_batch(candidates, R, f):
    """
    Evaluate berg_residual() for many candidate vectors at once.

    Intended for population-based or vectorized minimizers. The loops over
    n and j run in the same order as the scalar evaluator, vectorized
    across candidates only. Powers go through the same float64 scalar
    routine as residual_terms() (numpy's array power may round differently),
    so each element equals berg_residual() on that row exactly.

    Parameters
    ----------
    candidates : array-like, shape (K, 2J-1)
        One packed Berg vector per row. A single 1-D vector is accepted.
    R, f : sequence of float
        As in berg_residual().

    Returns
    -------
    numpy.ndarray, shape (K,)
        delta for each candidate.

    Raises
    ------
    ValueError
        If the candidates do not form a 2-D array of equal-length rows.
    """
    C = np.atleast_2d(np.asarray(candidates, dtype=np.float64))
    if C.ndim != 2:
        raise ValueError(
            "candidates must be a 2-D array, got shape {}".format(C.shape))

    K, length = C.shape
    J = (length + 1) // 2
    nmax = len(f)

    mu = C[:, :J]
    lam = np.zeros((K, J), dtype=np.float64)
    lam[:, 0] = BERG_ANCHOR_MAGNITUDE
    lam[:, 1:] = C[:, J:2 * J - 1]

    shell_ratio = np.float64(R[0]) / np.float64(R[-1])
    f1 = np.float64(f[0])

    delta = np.zeros(K, dtype=np.float64)
    for n in range(2, nmax + 1):
        p = n - 1
        mu1_p = _column_power(mu[:, 0], p)

        term0 = np.zeros(K, dtype=np.float64)
        for j in range(1, J):
            term0 = term0 + lam[:, j] * (_column_power(mu[:, j], p) - mu1_p)

        ratio = shell_ratio ** p
        term1 = ratio * (np.float64(f[n - 1]) - f1 * mu1_p - term0)
        delta = delta + term1 * term1
    return delta


def make_objective(R, f):
    """
    Bind R and f into a one-argument objective for a minimizer.

    The radii and weights are copied, so later changes to the caller's
    sequences do not affect the objective.

    Example
    -------
    >>> from scipy.optimize import minimize
    >>> res = minimize(make_objective(R, f), x0, method="Nelder-Mead")
    """
    radii = tuple(R)
    weights = tuple(f)

    def objective(berg):
        return berg_residual(berg, radii, weights)

    return objective
