import os
import time
import logging
from typing import Dict, Optional, Tuple

import pygame

from simulation import LightState, SimulationConfig, SimulationSnapshot

# -----------------------------------------------------------------------------
#  Console view
# -----------------------------------------------------------------------------

class TextRenderer:
    def __init__(self, config: SimulationConfig):
        self.config = config

    def render(self, snapshot: SimulationSnapshot) -> str:
        width = self.config.trackWidth
        lines = [f"Simulation Time: {snapshot.time:g}s"]
        for lane in snapshot.lanes:
            lines.append(f"Lane {lane.lane_id} [Light: {lane.light_symbol}]")
            road = ["-"] * width
            for symbol, position in lane.vehicles:
                idx = int((position / lane.length) * width)
                if 0 <= idx < width:
                    road[idx] = symbol
            lines.append("  " + "".join(road))
            lines.append("")
        return "\n".join(lines)

    def draw(self, snapshot: SimulationSnapshot):
        os.system("cls" if os.name == "nt" else "clear")
        print(self.render(snapshot), flush=True)

    def pace(self):
        time.sleep(max(0, self.config.frameDelayMs) / 1000.0)

    def should_quit(self) -> bool:
        return False

    def close(self):
        pass

# -----------------------------------------------------------------------------
#  Pygame view
# -----------------------------------------------------------------------------

BACKGROUND = (40, 40, 40)
ROAD = (90, 90, 90)
STOP_LINE = (240, 240, 240)
TEXT = (255, 255, 255)

LIGHT_COLORS: Dict[LightState, Tuple[int, int, int]] = {
    LightState.GREEN: (0, 200, 0),
    LightState.YELLOW: (230, 200, 0),
    LightState.RED: (210, 0, 0),
}

VEHICLE_COLORS: Dict[str, Tuple[int, int, int]] = {
    "C": (52, 152, 219),
    "B": (155, 89, 182),
    "T": (230, 126, 34),
    "M": (26, 188, 156),
}

class PygameRenderer:
    margin = 80
    laneHeight = 40
    laneGap = 50
    topOffset = 70
    lightArea = 60
    vehicleWidth = 12

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.screen: Optional[pygame.Surface] = None
        self.clock: Optional[pygame.time.Clock] = None
        self.font: Optional[pygame.font.Font] = None
        self._quit = False

    def open(self):
        pygame.init()
        self.screen = pygame.display.set_mode((self.config.screenWidth, self.config.screenHeight))
        pygame.display.set_caption("SIMULATION")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.Font(None, 26)
        logging.info("Opened %dx%d window", self.config.screenWidth, self.config.screenHeight)

    def lane_rect(self, index: int, surface: pygame.Surface) -> pygame.Rect:
        width = surface.get_width() - 2 * self.margin - self.lightArea
        top = self.topOffset + index * (self.laneHeight + self.laneGap)
        return pygame.Rect(self.margin, top, width, self.laneHeight)

    def x_for(self, road: pygame.Rect, position: float, length: float) -> int:
        return road.left + int((position / length) * road.width)

    def draw_frame(self, surface: pygame.Surface, snapshot: SimulationSnapshot):
        surface.fill(BACKGROUND)

        if self.font is not None:
            timeText = self.font.render(f"Time Elapsed: {snapshot.time:g}", True, TEXT)
            surface.blit(timeText, (self.margin, 20))

        for i, lane in enumerate(snapshot.lanes):
            road = self.lane_rect(i, surface)
            pygame.draw.rect(surface, ROAD, road)

            sx = self.x_for(road, lane.stop_line, lane.length)
            pygame.draw.line(surface, STOP_LINE, (sx, road.top), (sx, road.bottom - 1), 2)

            light_center = (road.right + self.lightArea // 2, road.centery)
            pygame.draw.circle(surface, LIGHT_COLORS[lane.light_state], light_center, 14)

            if self.font is not None:
                label = self.font.render(f"Lane {lane.lane_id}", True, TEXT)
                surface.blit(label, (10, road.centery - label.get_height() // 2))

            for symbol, position in lane.vehicles:
                if not 0 <= position < lane.length:
                    continue
                vx = self.x_for(road, position, lane.length)
                body = pygame.Rect(0, 0, self.vehicleWidth, self.laneHeight - 14)
                body.center = (vx, road.centery)
                pygame.draw.rect(surface, VEHICLE_COLORS.get(symbol, TEXT), body)

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._quit = True
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                self._quit = True

    def draw(self, snapshot: SimulationSnapshot):
        if self.screen is None:
            self.open()
        self._handle_events()
        self.draw_frame(self.screen, snapshot)
        pygame.display.update()

    def pace(self):
        if self.clock is not None and self.config.frameDelayMs > 0:
            self.clock.tick(1000.0 / self.config.frameDelayMs)

    def should_quit(self) -> bool:
        return self._quit

    def close(self):
        if self.screen is not None:
            pygame.quit()
            self.screen = None

RENDERERS = {
    "text": TextRenderer,
    "pygame": PygameRenderer,
}

def make_renderer(config: SimulationConfig):
    try:
        cls = RENDERERS[config.renderer]
    except KeyError:
        raise ValueError(f"unknown renderer {config.renderer!r}, expected one of {sorted(RENDERERS)}") from None
    return cls(config)
