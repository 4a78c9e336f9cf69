"""Async create/update pipelines run by DataStore."""

from recordstore.pipeline.create import CreatePipeline
from recordstore.pipeline.eager import EagerInjection
from recordstore.pipeline.update import UpdatePipeline
from recordstore.pipeline.upsert import route_create

__all__ = ["CreatePipeline", "EagerInjection", "UpdatePipeline", "route_create"]
