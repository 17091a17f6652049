"""
Traced pattern record, pattern algebra, tracer accounting and the simulator
"""
