"""Viewing slot reservation engine.

The engine owns every transition of a slot's status/occupant pair and the
``viewing_time`` mirror on the applicant's inquiry. Identity resolution and
notification delivery are injected collaborators.
"""
