"""
GateWatch Services

Incident response, posture scoring and the signal sources they consume.
"""
