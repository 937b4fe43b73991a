"""Computation services: expansion, synchronization, snapshots and diffing."""
