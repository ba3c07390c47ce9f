"""Caseload planner: calendar shaping, delegation visibility and curriculum tracking for special-education providers."""
