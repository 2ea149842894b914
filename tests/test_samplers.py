import numpy as np
import pytest

from epiflows import Sampler
from epiflows.simulator import samplers


@pytest.mark.parametrize(
    "sampler",
    [
        samplers.lognormal(1.46, 0.35),
        samplers.normal(4.5, 1.5),
        samplers.gamma(2.0, 1.5),
        samplers.fixed(3.0),
    ],
)
def test_shape_and_sign(sampler):
    draws = sampler(1000)
    assert isinstance(sampler, Sampler)
    assert draws.shape == (1000,)
    assert (draws >= 0).all()


def test_normal_is_clipped_at_zero():
    draws = samplers.normal(0.0, 5.0, rng=np.random.default_rng(0))(5000)
    assert draws.min() == 0.0
    assert (draws == 0).mean() > 0.3


def test_generator_makes_draws_reproducible():
    a = samplers.lognormal(1.0, 0.5, rng=np.random.default_rng(3))(10)
    b = samplers.lognormal(1.0, 0.5, rng=np.random.default_rng(3))(10)
    np.testing.assert_array_equal(a, b)


def test_global_state_is_used_by_default():
    np.random.seed(5)
    a = samplers.gamma(2.0, 1.0)(10)
    np.random.seed(5)
    b = samplers.gamma(2.0, 1.0)(10)
    np.testing.assert_array_equal(a, b)


def test_from_config():
    sampler = samplers.from_config({"distribution": "fixed", "value": 2.5})
    assert sampler(3).tolist() == [2.5, 2.5, 2.5]

    sampler = samplers.from_config(
        {"distribution": "lognormal", "meanlog": 1.0, "sdlog": 0.2},
        rng=np.random.default_rng(1),
    )
    assert sampler(4).shape == (4,)

    with pytest.raises(KeyError):
        samplers.from_config({"meanlog": 1.0})
    with pytest.raises(KeyError, match="weibull"):
        samplers.from_config({"distribution": "weibull"})
    with pytest.raises(TypeError):
        samplers.from_config({"distribution": "normal", "mu": 1.0, "sd": 1.0})


def test_invalid_parameters():
    with pytest.raises(ValueError):
        samplers.normal(1.0, -1.0)
    with pytest.raises(ValueError):
        samplers.gamma(0.0, 1.0)
    with pytest.raises(ValueError):
        samplers.fixed(-2.0)
