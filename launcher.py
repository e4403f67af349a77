import logging
import math
import os
from argparse import ArgumentParser, Namespace
from os import path
from signal import signal, SIGINT
from threading import Event

import cv2
import numpy as np

from liquidfield import FluidField, LiquidSolver, PointerTracker, Settings, Fbo, TextureFormat
from liquidfield.flow import FlowUtil
from liquidfield.gl import HeadlessContext, RenderCaps
from liquidfield.flow.visualization import direction_map, texture_to_image
from liquidfield.utils import Point2f


def circle_path(frame: int, frames_per_turn: float, radius: float) -> Point2f:
    """Pointer on a circle around the center, in NDC."""
    angle: float = 2.0 * math.pi * frame / frames_per_turn
    return Point2f(math.cos(angle) * radius, math.sin(angle) * radius)


if __name__ == '__main__':
    parser: ArgumentParser = ArgumentParser(description='Headless demo: drive both fluid layers with a circular pointer path')
    parser.add_argument('-f',      '--frames',          type=int,   default=240,    help='number of frames to simulate')
    parser.add_argument('-fps',    '--fps',             type=float, default=60.0,   help='simulated frames per second')
    parser.add_argument('-e',      '--every',           type=int,   default=30,     help='write images every n frames')
    parser.add_argument('-r',      '--radius',          type=float, default=0.5,    help='pointer path radius in NDC')
    parser.add_argument('-t',      '--turn',            type=float, default=120.0,  help='frames per pointer turn')
    parser.add_argument('-o',      '--output',          type=str,   default='output', help='output directory')
    parser.add_argument('-s',      '--settings',        type=str,   default=None,   help='settings json file')
    parser.add_argument('-v',      '--verbose',         action='store_true',        help='debug logging')

    args: Namespace = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    logger = logging.getLogger('launcher')

    if args.settings is not None:
        logger.info(f"Loading settings from: {args.settings}")
        settings: Settings = Settings.load(args.settings)
    else:
        settings = Settings()

    os.makedirs(args.output, exist_ok=True)

    context = HeadlessContext()
    context.create()
    caps: RenderCaps = RenderCaps.from_current_context()

    fluid: FluidField | None = None
    liquid: LiquidSolver | None = None
    if settings.fluid_enabled:
        fluid = FluidField(settings.fluid_resolution, settings.fluid, caps)
    if settings.liquid_enabled:
        liquid = LiquidSolver(settings.liquid, caps)

    liquid_target: Fbo = Fbo()
    if liquid is not None:
        liquid_target.allocate(liquid.texture_size, liquid.texture_size, TextureFormat.RGBA32F)

    tracker = PointerTracker(freq=args.fps)

    shutdown_event = Event()

    def signal_handler_exit(sig, frame) -> None:
        logger.info("Received interrupt signal, shutting down...")
        shutdown_event.set()

    signal(SIGINT, signal_handler_exit)

    for frame in range(args.frames):
        if shutdown_event.is_set():
            break

        timestamp: float = frame / args.fps
        tracker.move(circle_path(frame, args.turn, args.radius))
        pointer = tracker.update(timestamp)

        if fluid is not None:
            fluid.set_pointer_state(pointer)
            fluid.update()
        if liquid is not None:
            liquid.update(pointer.position if pointer.active else None, pointer.velocity)
            liquid.set_time(timestamp)

        if (frame + 1) % args.every == 0 or frame == args.frames - 1:
            if fluid is not None:
                image: np.ndarray = direction_map(fluid.get_texture(), 20.0)
                cv2.imwrite(path.join(args.output, f"field_{frame + 1:05d}.png"), image)
            if liquid is not None:
                liquid.copy_density_to(liquid_target)
                cv2.imwrite(path.join(args.output, f"liquid_{frame + 1:05d}.png"), texture_to_image(liquid_target))
                cv2.imwrite(path.join(args.output, f"velocity_{frame + 1:05d}.png"), direction_map(liquid.velocity, 0.25))
            logger.info(f"frame {frame + 1}/{args.frames} written to {args.output}")

    if fluid is not None:
        fluid.deallocate()
    if liquid is not None:
        liquid.deallocate()
    liquid_target.deallocate()
    FlowUtil.deallocate()
    context.destroy()
