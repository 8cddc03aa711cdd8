"""Pure, stateless calculators behind the plan simulations.

* ``random_variate`` – Box–Muller normal sampler over a numpy generator.
* ``percentiles`` – representative-path index policy shared by the simulators.
* ``target`` – target nest egg, baseline months to target and required return.
* ``accumulation`` – Monte Carlo distribution of months until the target is reached.
* ``decumulation`` – Monte Carlo survival of the nest egg under fixed withdrawals.
* ``projection`` – normalized forward projection of a portfolio's value.

Every function builds its results fresh per call; nothing is cached or shared
between calls, so the calculators are safe to call from any thread.
"""

from . import random_variate, percentiles, target, accumulation, decumulation, projection  # noqa: F401

__all__ = ["random_variate", "percentiles", "target", "accumulation", "decumulation", "projection"]
