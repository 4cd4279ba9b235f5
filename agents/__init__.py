"""Run orchestration and command line entry point."""
