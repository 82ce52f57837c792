import pytest

from mycelium.metric import METRIC_INFINITE, Metric


def test_infinite_metric_value():
    assert int(Metric.infinite()) == 0xFFFF
    assert Metric.infinite().is_infinite()


def test_finite_metric_is_not_infinite():
    assert not Metric(10).is_infinite()


def test_is_direct():
    assert Metric(0).is_direct()
    assert not Metric(1).is_direct()


def test_int_conversion_round_trip():
    assert int(Metric(42)) == 42


def test_str_infinite():
    assert str(Metric.infinite()) == "Infinite"


def test_str_finite():
    assert str(Metric(123)) == "123"


def test_out_of_range_rejected():
    with pytest.raises(ValueError):
        Metric(METRIC_INFINITE + 1)
    with pytest.raises(ValueError):
        Metric(-1)


def test_non_integer_rejected():
    with pytest.raises(TypeError):
        Metric("5")


def test_add_is_commutative():
    assert Metric(5) + Metric(7) == Metric(7) + Metric(5)


def test_add_with_zero_is_identity():
    assert Metric(300) + Metric(0) == Metric(300)


def test_add_infinite_gives_infinite():
    assert (Metric(5) + Metric.infinite()).is_infinite()
    assert (Metric.infinite() + Metric(5)).is_infinite()


def test_add_saturates_below_infinite():
    result = Metric(0xFFFE) + Metric(1)
    assert result == Metric(0xFFFE)
    assert not result.is_infinite()


def test_add_large_values_saturates():
    assert Metric(0xFFFE) + Metric(0xFFFE) == Metric(0xFFFE)


def test_add_then_sub_round_trip():
    assert (Metric(100) + Metric(50)) - Metric(50) == Metric(100)


def test_sub_saturates_at_zero():
    assert Metric(3) - Metric(10) == Metric(0)


def test_sub_infinite_raises():
    with pytest.raises(ValueError):
        Metric(3) - Metric.infinite()


def test_sub_from_infinite_stays_infinite():
    assert (Metric.infinite() - Metric(3)).is_infinite()


def test_delta_is_symmetric():
    assert Metric(3).delta(Metric(10)) == Metric(10).delta(Metric(3))


def test_delta_with_self_is_zero():
    assert Metric(77).delta(Metric(77)).is_direct()


def test_ordering():
    assert Metric(1) < Metric(2)
    assert Metric.infinite() > Metric(0xFFFE)
    assert sorted([Metric(9), Metric(1), Metric(4)]) == [Metric(1), Metric(4), Metric(9)]


def test_add_non_metric_is_type_error():
    with pytest.raises(TypeError):
        Metric(1) + 1