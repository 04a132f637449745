"""Performance benchmarks for generalqp.

Timings of the updatable factorizations and of full solves on random dense
problems.
"""
