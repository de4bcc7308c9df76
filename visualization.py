# visualization.py
"""
Handles the visualization of the iron filings using Pygame.
"""
import logging
import pygame
from constants import (
    BACKGROUND_COLOR, FPS, MOTION_BLUR_ALPHA, FILING_HALF_LENGTH,
    FILING_STROKE_WIDTH, WINDOW_TITLE
)
from simulation import ParticleSnapshot
from vector import from_angle
from typing import Optional

# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, width: int, height: int, vis_params: Optional[dict] = None):
#     - Inputs:
#       - width, height: size of the simulation area in pixels.
#       - vis_params: "visualization" section of config.json.
#         - "fps": int (default constants.FPS)
#         - "motion_blur_alpha": int 0-255 (default constants.MOTION_BLUR_ALPHA)
#         - "background_color": [r, g, b] (default constants.BACKGROUND_COLOR)
#     - Side Effects: Initializes Pygame and creates a display surface.
#
#   - draw(self, snapshot: ParticleSnapshot) -> bool:
#     - Outputs: False if the user has quit, True otherwise.
#     - Side Effects: Fades the previous frame and draws every particle as a
#       short stroke aligned with its heading. Never touches simulation state.


class Visualizer:
    """
    Renders particle snapshots as iron shavings over a fading background.
    """
    def __init__(self, width: int, height: int, vis_params: Optional[dict] = None):
        """
        Initializes Pygame and the display window.
        """
        vis_params = vis_params if vis_params is not None else {}
        self.fps = int(vis_params.get('fps', FPS))
        blur_alpha = int(vis_params.get('motion_blur_alpha', MOTION_BLUR_ALPHA))
        background = self._parse_color(vis_params.get('background_color'), BACKGROUND_COLOR)

        pygame.init()
        self.width, self.height = int(width), int(height)
        self.screen = pygame.display.set_mode((self.width, self.height))
        pygame.display.set_caption(WINDOW_TITLE)
        self.clock = pygame.time.Clock()

        # Blitting this translucent layer every frame fades old strokes into trails.
        self.blur_surface = pygame.Surface((self.width, self.height), pygame.SRCALPHA)
        self.blur_surface.fill((background.r, background.g, background.b, blur_alpha))
        # Strokes are drawn here first so their alpha blends over the trails.
        self.filing_surface = pygame.Surface((self.width, self.height), pygame.SRCALPHA)

        self.screen.fill(background)

        logging.info(f"Visualizer initialized with Pygame display ({self.width}x{self.height}).")

    @staticmethod
    def _parse_color(config_color, default) -> pygame.Color:
        if not config_color:
            return pygame.Color(default)
        try:
            return pygame.Color(*config_color)
        except (ValueError, TypeError) as e:
            logging.error(f"Could not parse background_color from config: {e}. Falling back to default.")
            return pygame.Color(default)

    def draw(self, snapshot: ParticleSnapshot) -> bool:
        """
        Draws all particles and handles events.

        Returns:
            bool: False if the simulation should exit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

        # 1. Fade the previous frame
        self.screen.blit(self.blur_surface, (0, 0))

        # 2. Stroke endpoints for every filing, computed in one pass
        offset = from_angle(snapshot.headings) * FILING_HALF_LENGTH
        starts = snapshot.positions - offset
        ends = snapshot.positions + offset

        self.filing_surface.fill((0, 0, 0, 0))
        for start, end, tint in zip(starts, ends, snapshot.tints):
            pygame.draw.line(
                self.filing_surface,
                tuple(int(c) for c in tint),
                (float(start[0]), float(start[1])),
                (float(end[0]), float(end[1])),
                FILING_STROKE_WIDTH
            )
        self.screen.blit(self.filing_surface, (0, 0))

        pygame.display.flip()
        self.clock.tick(self.fps)
        return True

    def close(self):
        """Shuts down Pygame."""
        pygame.quit()
