import pytest

from simulation import Lane, LightState, Vehicle, VehicleType, kmh_to_mps


def lane_with(state, length=500.0):
    lane = Lane(1, length, 50.0)
    lane.light.state = state
    return lane


def test_kmh_conversion():
    assert kmh_to_mps(36.0) == 10.0
    assert kmh_to_mps(0.0) == 0.0


def test_vehicle_without_lane_does_not_move():
    vehicle = Vehicle(1, VehicleType.CAR, 40.0, position=12.0)
    for _ in range(5):
        assert vehicle.move(1.0, None) is False
    assert vehicle.position == 12.0
    assert vehicle.speed == 40.0


@pytest.mark.parametrize("start", [0.0, 123.0, 489.0, 495.0])
def test_green_light_always_advances_by_full_distance(start):
    vehicle = Vehicle(1, VehicleType.BUS, 45.0, position=start)
    assert vehicle.move(1.5, lane_with(LightState.GREEN)) is False
    assert vehicle.position == start + 45.0 * 1000.0 / 3600.0 * 1.5
    assert vehicle.speed == 45.0


@pytest.mark.parametrize("state", [LightState.RED, LightState.YELLOW])
def test_crossing_stop_line_on_non_green_brakes(state):
    lane = lane_with(state)
    vehicle = Vehicle(1, VehicleType.TRUCK, 36.0, position=485.0)
    assert vehicle.move(1.0, lane) is True
    assert vehicle.speed == 0.0
    assert vehicle.stopped
    assert vehicle.position == 485.0


def test_stopped_vehicle_stays_put_even_after_green():
    lane = lane_with(LightState.RED)
    vehicle = Vehicle(1, VehicleType.CAR, 36.0, position=485.0)
    vehicle.move(1.0, lane)

    lane.light.state = LightState.GREEN
    for _ in range(10):
        assert vehicle.move(1.0, lane) is False
    assert vehicle.position == 485.0
    assert vehicle.speed == 0.0


def test_landing_exactly_on_stop_line_brakes():
    vehicle = Vehicle(1, VehicleType.CAR, 36.0, position=480.0)
    assert vehicle.move(1.0, lane_with(LightState.RED)) is True
    assert vehicle.position == 480.0


def test_vehicle_already_at_stop_line_keeps_moving_on_red():
    vehicle = Vehicle(1, VehicleType.CAR, 36.0, position=490.0)
    assert vehicle.move(1.0, lane_with(LightState.RED)) is False
    assert vehicle.position == 500.0


def test_vehicle_inside_stop_zone_keeps_moving_on_red():
    vehicle = Vehicle(1, VehicleType.MOTORCYCLE, 36.0, position=492.0)
    vehicle.move(1.0, lane_with(LightState.YELLOW))
    assert vehicle.position == 502.0
    assert vehicle.speed == 36.0


def test_far_from_stop_line_moves_on_red():
    vehicle = Vehicle(1, VehicleType.CAR, 36.0, position=100.0)
    vehicle.move(1.0, lane_with(LightState.RED))
    assert vehicle.position == 110.0


def test_symbols_per_category():
    assert [t.symbol for t in VehicleType] == ["C", "B", "T", "M"]
    assert Vehicle(7, VehicleType.BUS, 30.0).symbol == "B"
