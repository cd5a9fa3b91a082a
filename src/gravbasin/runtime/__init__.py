"""Trajectory kernels: force field, integrator, outcome types and the JIT toggle."""
