# main.py
"""
Main entry point for the Iron Filings animation.

This script orchestrates the entire run:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the simulation and, unless running headless, the visualizer.
4. Calls Simulation.step() once per frame until the user quits or
   max_steps is reached.
5. Handles clean shutdown and logs the optional performance profile.
"""
import logging
from utils import setup_logging, load_config
import numpy as np
import cProfile
import pstats
import io

def main(config_path: str = 'config.json'):
    """
    The main function to run the simulation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Iron Filings Simulation Starting ---")

    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from simulation import Simulation

    sim = Simulation(sim_params)

    visualizer = None
    if not run_params.get('headless', False):
        # Imported lazily so headless runs do not need a display.
        from visualization import Visualizer
        visualizer = Visualizer(sim.bounds.width, sim.bounds.height, vis_params)

    profiler = cProfile.Profile() if run_params.get('profile', False) else None

    log_throttle = int(run_params.get('log_throttle_steps', 300))
    max_steps = run_params.get('max_steps', 0) # 0 runs until the window is closed

    if visualizer is None and not max_steps:
        logging.error("Headless runs need a positive max_steps in run_control. Nothing to do.")
        return

    running = True
    step_num = 0

    if profiler:
        profiler.enable()
    while running:
        sim.step()
        step_num += 1

        if visualizer and not visualizer.draw(sim.snapshot()):
            running = False

        # Hot loop: throttle logs. log_throttle_steps = 0 turns progress logs off.
        if log_throttle and step_num % log_throttle == 0:
            logging.info(f"Simulation step {step_num}" + (f"/{max_steps}" if max_steps else ""))
            avg_speed = np.mean(sim.particles.speeds())
            logging.debug(f"Step {step_num} | Average Speed: {avg_speed:.4f}")

        if max_steps and step_num >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            running = False
    if profiler:
        profiler.disable()

    if visualizer:
        visualizer.close()
    logging.info("Simulation loop finished.")

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Iron Filings Simulation Shutting Down ---")


if __name__ == "__main__":
    main()
