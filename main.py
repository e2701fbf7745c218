# main.py
"""
Main entry point for the particle morph.

This script orchestrates the entire application lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the simulation and the visualizer.
4. Runs the frame loop, delivering the background image load once.
5. Handles clean shutdown.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor
import pygame
from utils import setup_logging, load_config, FpsMeter
import numpy as np
import cProfile
import pstats
import io

def main():
    """
    The main function to run the particle morph.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Morph Starting ---")

    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from simulation import Simulation
    from visualization import Visualizer
    from content import load_image

    # --- Component Initialization ---
    # The visualizer initializes pygame, which image decoding relies on.
    visualizer = Visualizer(vis_params)
    simulation = Simulation(sim_params, now=time.perf_counter())

    # The image is decoded off the frame loop; its result is delivered once.
    executor = ThreadPoolExecutor(max_workers=1)
    image_future = executor.submit(load_image, vis_params.get('image_path', 'silhouette.png'))
    image_delivered = False

    fps_meter = FpsMeter()
    fps = 0.0
    clock = pygame.time.Clock()
    target_fps = vis_params.get('fps', 60)

    profiler = cProfile.Profile()

    log_throttle = run_params.get('log_throttle_steps', 300)
    max_steps = run_params.get('max_steps', 0)

    running = True
    step_num = 0

    profiler.enable()
    while running:
        dt = clock.tick(target_fps) / 1000.0
        now = time.perf_counter()

        if not image_delivered and image_future.done():
            simulation.on_image_result(image_future.result(), now)
            image_delivered = True

        simulation.step(dt, now, visualizer.pointer_state())
        step_num += 1

        reported = fps_meter.tick(dt)
        if reported is not None:
            fps = reported

        if not visualizer.draw(simulation, now, fps):
            running = False

        # Hot loops must throttle logs
        if step_num % log_throttle == 0:
            logging.info(f"Frame {step_num} | {fps:.1f} FPS | mode '{simulation.mode}'")
            speeds = np.linalg.norm(simulation.particles.velocities.reshape(-1, 3), axis=1)
            logging.debug(f"Frame {step_num} | Average speed: {speeds.mean():.4f}")

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping.")
            running = False
    profiler.disable()

    executor.shutdown(wait=False)
    visualizer.close()
    logging.info("Frame loop finished.")

    logging.info("--- Performance Profile ---")
    s = io.StringIO()
    # Sort by cumulative time spent in the function
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
    stats.print_stats(20)
    logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Morph Shutting Down ---")


if __name__ == "__main__":
    main()
