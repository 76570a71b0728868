import sys
import logging
from typing import List, Optional

from display import make_renderer
from simulation import SimulationConfig, SimulationEngine

# -----------------------------------------------------------------------------
#  Logging
# -----------------------------------------------------------------------------

# stdout carries the text frames
def log_handlers() -> List[logging.Handler]:
    return [logging.StreamHandler(sys.stderr)]

def configure_logging():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        handlers=log_handlers(),
    )

def log_summary(engine: SimulationEngine):
    summary = engine.stats.summary()
    logging.info("Lane-wise Vehicle Counts:")
    for lane_id in engine.lanes:
        logging.info("Lane %d | exited: %d | stopped: %d | avg occupancy: %.2f",
                     lane_id, summary["exited"][lane_id], summary["stopped"][lane_id],
                     summary["avg_occupancy"][lane_id])
    logging.info("Total vehicles spawned: %d", summary["spawned"])
    logging.info("Total time: %g", engine.sim_time)

# -----------------------------------------------------------------------------
#  Entry
# -----------------------------------------------------------------------------

def main(config: Optional[SimulationConfig] = None) -> int:
    configure_logging()
    config = config if config is not None else SimulationConfig()

    engine = SimulationEngine(config)
    engine.setup()
    renderer = make_renderer(config)

    logging.info("Simulation started.")
    try:
        while engine.is_running():
            engine.step(config.timeStep)
            renderer.draw(engine.snapshot())
            if renderer.should_quit():
                logging.info("Window closed, stopping at %gs", engine.sim_time)
                break
            renderer.pace()
    except KeyboardInterrupt:
        logging.info("Interrupted at %gs", engine.sim_time)
    finally:
        renderer.close()
        log_summary(engine)

    print("Simulation ended.")
    return 0

if __name__ == "__main__":
    sys.exit(main())
