import random
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Tuple

# -----------------------------------------------------------------------------
#  Config
# -----------------------------------------------------------------------------

@dataclass
class SimulationConfig:
    # (lane id, length in meters, speed limit in km/h); the limit is informational only
    lanes: List[Tuple[int, float, float]] = None

    # signal timing (seconds)
    greenTime: float = 10.0
    yellowTime: float = 3.0
    redTime: float = 7.0

    # braking is checked this many meters before the end of the lane
    stopLineOffset: float = 10.0

    # spawn/traffic
    spawnProbability: float = 0.3
    speedRangeKmh: Tuple[float, float] = (20.0, 50.0)

    # clock
    simulationTime: float = 60.0
    timeStep: float = 1.0
    seed: Optional[int] = None

    # display only, never read by the engine
    renderer: str = "text"
    frameDelayMs: int = 500
    trackWidth: int = 50
    screenWidth: int = 1000
    screenHeight: int = 360

    def __post_init__(self):
        if self.lanes is None:
            self.lanes = [(1, 500.0, 50.0), (2, 600.0, 40.0)]

        # lanes may be given as lists
        self.lanes = [(int(l[0]), float(l[1]), float(l[2])) for l in self.lanes]
        self.speedRangeKmh = (float(self.speedRangeKmh[0]), float(self.speedRangeKmh[1]))

class NoLanesError(ValueError):
    pass

# -----------------------------------------------------------------------------
#  Signals: tick-based controller
# -----------------------------------------------------------------------------

class LightState(Enum):
    GREEN = "GREEN"
    YELLOW = "YELLOW"
    RED = "RED"

    @property
    def symbol(self) -> str:
        return _LIGHT_SYMBOLS[self]

_LIGHT_SYMBOLS = {
    LightState.GREEN: "\U0001F7E2",
    LightState.YELLOW: "\U0001F7E1",
    LightState.RED: "\U0001F534",
}

class TrafficLightController:
    def __init__(self, greenTime: float = 10.0, yellowTime: float = 3.0, redTime: float = 7.0,
                 initial_state: LightState = LightState.RED):
        for name, value in (("green", greenTime), ("yellow", yellowTime), ("red", redTime)):
            if value <= 0:
                raise ValueError(f"{name} duration must be positive, got {value}")

        self.greenTime = float(greenTime)
        self.yellowTime = float(yellowTime)
        self.redTime = float(redTime)

        self.state = initial_state
        self.timer = 0.0

        # phase -> (dwell duration, next phase)
        self._transitions: Dict[LightState, Tuple[float, LightState]] = {
            LightState.GREEN: (self.greenTime, LightState.YELLOW),
            LightState.YELLOW: (self.yellowTime, LightState.RED),
            LightState.RED: (self.redTime, LightState.GREEN),
        }

    def duration(self, state: Optional[LightState] = None) -> float:
        return self._transitions[state or self.state][0]

    def update(self, elapsed: float) -> bool:
        self.timer += elapsed
        duration, next_state = self._transitions[self.state]
        if self.timer >= duration:
            logging.debug("Light %s -> %s", self.state.value, next_state.value)
            self.state = next_state
            self.timer = 0.0
            return True
        return False

    def time_remaining(self) -> float:
        return self.duration() - self.timer

    @property
    def symbol(self) -> str:
        return self.state.symbol

# -----------------------------------------------------------------------------
#  Vehicle
# -----------------------------------------------------------------------------

class VehicleType(Enum):
    CAR = "C"
    BUS = "B"
    TRUCK = "T"
    MOTORCYCLE = "M"

    @property
    def symbol(self) -> str:
        return self.value

VEHICLE_TYPES: List[VehicleType] = list(VehicleType)

def kmh_to_mps(speed_kmh: float) -> float:
    return speed_kmh * 1000.0 / 3600.0

class Vehicle:
    def __init__(self, vid: int, vehicle_type: VehicleType, speed: float, position: float = 0.0):
        self.vid = vid
        self.vehicle_type = vehicle_type
        self.speed = float(speed)         # km/h
        self.position = float(position)   # meters from lane start
        self.lane_id: Optional[int] = None

    def __repr__(self):
        return (f"Vehicle(vid={self.vid}, type={self.vehicle_type.name}, "
                f"speed={self.speed:.1f}, position={self.position:.1f}, lane={self.lane_id})")

    @property
    def symbol(self) -> str:
        return self.vehicle_type.symbol

    @property
    def stopped(self) -> bool:
        return self.speed == 0.0

    def move(self, time_step: float, lane: Optional["Lane"]) -> bool:
        if lane is None:
            return False

        next_pos = self.position + kmh_to_mps(self.speed) * time_step

        stop_line = lane.stop_line
        if lane.light.state != LightState.GREEN and self.position < stop_line <= next_pos:
            self.speed = 0.0
            logging.debug("Vehicle %d stopped at lane %d stop line (%.1f m)", self.vid, lane.lane_id, self.position)
            return True

        self.position = next_pos
        return False

# -----------------------------------------------------------------------------
#  Lane
# -----------------------------------------------------------------------------

class LaneUpdate(NamedTuple):
    evicted: List[int]
    braked: List[int]

class Lane:
    def __init__(self, lane_id: int, length: float, speed_limit: float,
                 light: Optional[TrafficLightController] = None, stop_line_offset: float = 10.0):
        self.lane_id = lane_id
        self.length = float(length)
        self.speed_limit = float(speed_limit)  # stored, never applied to vehicles
        self.stop_line_offset = float(stop_line_offset)
        self.light = light if light is not None else TrafficLightController()

        # resident vehicle ids in insertion order
        self.vehicle_ids: List[int] = []

    @property
    def stop_line(self) -> float:
        return self.length - self.stop_line_offset

    def add_vehicle(self, vehicle: Vehicle):
        self.vehicle_ids.append(vehicle.vid)
        vehicle.lane_id = self.lane_id

    def residents(self, vehicles: Dict[int, Vehicle]) -> List[Vehicle]:
        return [vehicles[vid] for vid in self.vehicle_ids]

    def update(self, time_step: float, vehicles: Dict[int, Vehicle]) -> LaneUpdate:
        self.light.update(time_step)

        braked: List[int] = []
        for vid in self.vehicle_ids:
            if vehicles[vid].move(time_step, self):
                braked.append(vid)

        # retain pass instead of erasing while iterating
        kept: List[int] = []
        evicted: List[int] = []
        for vid in self.vehicle_ids:
            if vehicles[vid].position >= self.length:
                evicted.append(vid)
            else:
                kept.append(vid)
        self.vehicle_ids = kept

        return LaneUpdate(evicted, braked)

# -----------------------------------------------------------------------------
#  VehicleGenerator
# -----------------------------------------------------------------------------

class VehicleGenerator:
    def __init__(self, rng: random.Random, speed_range: Tuple[float, float] = (20.0, 50.0)):
        self.rng = rng
        self.speed_range = speed_range
        self.next_id = 1

    def create(self, lanes: List[Lane]) -> Tuple[Vehicle, Lane]:
        if not lanes:
            raise NoLanesError("cannot generate a vehicle: no lanes are configured")

        vehicle_type = self.rng.choice(VEHICLE_TYPES)
        speed = self.rng.uniform(self.speed_range[0], self.speed_range[1])
        lane = lanes[self.rng.randrange(len(lanes))]

        vehicle = Vehicle(self.take_id(), vehicle_type, speed)
        return vehicle, lane

    def take_id(self) -> int:
        vid = self.next_id
        self.next_id += 1
        return vid

# -----------------------------------------------------------------------------
#  Snapshots + stats
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LaneSnapshot:
    lane_id: int
    light_state: LightState
    light_symbol: str
    length: float
    stop_line: float
    vehicles: Tuple[Tuple[str, float], ...]

@dataclass(frozen=True)
class SimulationSnapshot:
    time: float
    lanes: Tuple[LaneSnapshot, ...]

@dataclass
class SimulationStats:
    spawned: int = 0
    exited: Dict[int, int] = field(default_factory=dict)
    stopped: Dict[int, int] = field(default_factory=dict)
    occupancy_samples: Dict[int, List[int]] = field(default_factory=dict)

    def register_lane(self, lane_id: int):
        self.exited.setdefault(lane_id, 0)
        self.stopped.setdefault(lane_id, 0)
        self.occupancy_samples.setdefault(lane_id, [])

    def summary(self) -> Dict[str, object]:
        avg_occupancy = {}
        for lane_id, samples in self.occupancy_samples.items():
            avg_occupancy[lane_id] = (sum(samples) / len(samples)) if samples else 0.0
        return {
            "spawned": self.spawned,
            "exited": dict(self.exited),
            "stopped": dict(self.stopped),
            "avg_occupancy": avg_occupancy,
        }

# -----------------------------------------------------------------------------
#  Simulation Engine
# -----------------------------------------------------------------------------

class SimulationEngine:
    def __init__(self, config: Optional[SimulationConfig] = None, rng: Optional[random.Random] = None):
        self.config = config if config is not None else SimulationConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)

        self.lanes: Dict[int, Lane] = {}
        self.vehicles: Dict[int, Vehicle] = {}

        self.generator = VehicleGenerator(self.rng, self.config.speedRangeKmh)
        self.stats = SimulationStats()
        self.sim_time = 0.0

    @property
    def next_id(self) -> int:
        return self.generator.next_id

    def setup(self):
        if not self.config.lanes:
            raise NoLanesError("simulation needs at least one lane")

        for lane_id, length, speed_limit in self.config.lanes:
            light = TrafficLightController(self.config.greenTime, self.config.yellowTime, self.config.redTime)
            self.add_lane(Lane(lane_id, length, speed_limit, light, self.config.stopLineOffset))

        logging.info("Simulation set up with %d lanes", len(self.lanes))

    def add_lane(self, lane: Lane):
        if lane.lane_id in self.lanes:
            raise ValueError(f"lane {lane.lane_id} already exists")
        self.lanes[lane.lane_id] = lane
        self.stats.register_lane(lane.lane_id)

    def lane_of(self, vehicle: Vehicle) -> Optional[Lane]:
        if vehicle.lane_id is None:
            return None
        return self.lanes.get(vehicle.lane_id)

    def add_vehicle(self, vehicle: Vehicle, lane_id: int) -> Vehicle:
        if vehicle.vid in self.vehicles:
            raise ValueError(f"vehicle {vehicle.vid} already exists")
        lane = self.lanes[lane_id]
        lane.add_vehicle(vehicle)
        self.vehicles[vehicle.vid] = vehicle
        self.stats.spawned += 1
        logging.debug("Spawned %r", vehicle)
        return vehicle

    def spawn(self, vehicle_type: VehicleType, speed: float, lane_id: int) -> Vehicle:
        return self.add_vehicle(Vehicle(self.generator.take_id(), vehicle_type, speed), lane_id)

    def generate_vehicle(self) -> Vehicle:
        vehicle, lane = self.generator.create(list(self.lanes.values()))
        return self.add_vehicle(vehicle, lane.lane_id)

    def step(self, elapsed: float):
        if elapsed < 0:
            raise ValueError(f"elapsed time must be non-negative, got {elapsed}")
        if not self.lanes:
            raise NoLanesError("simulation has no lanes; call setup() first")

        was_running = self.is_running()
        self.sim_time += elapsed

        if self.rng.random() < self.config.spawnProbability:
            self.generate_vehicle()

        for lane in self.lanes.values():
            result = lane.update(elapsed, self.vehicles)
            self.stats.stopped[lane.lane_id] += len(result.braked)
            for vid in result.evicted:
                vehicle = self.vehicles.pop(vid)
                vehicle.lane_id = None
                self.stats.exited[lane.lane_id] += 1
                logging.debug("Vehicle %d left lane %d", vid, lane.lane_id)
            self.stats.occupancy_samples[lane.lane_id].append(len(lane.vehicle_ids))

        if was_running and not self.is_running():
            logging.info("Simulation time reached: %s seconds", self.config.simulationTime)

    def is_running(self) -> bool:
        return self.sim_time < self.config.simulationTime

    def snapshot(self) -> SimulationSnapshot:
        lanes = []
        for lane in self.lanes.values():
            vehicles = tuple((v.symbol, v.position) for v in lane.residents(self.vehicles))
            lanes.append(LaneSnapshot(
                lane_id=lane.lane_id,
                light_state=lane.light.state,
                light_symbol=lane.light.symbol,
                length=lane.length,
                stop_line=lane.stop_line,
                vehicles=vehicles,
            ))
        return SimulationSnapshot(time=self.sim_time, lanes=tuple(lanes))
