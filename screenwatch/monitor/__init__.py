"""Escalation state, baseline storage and the tick scheduler."""
