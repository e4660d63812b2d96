"""Aggregate model imports so every table is registered on Base.metadata."""

from farmlog.models.chat_message import ChatMessageRow  # noqa: F401
from farmlog.models.crop import CropRow  # noqa: F401
from farmlog.models.farm_area import FarmAreaRow  # noqa: F401
from farmlog.models.growth_record import GrowthRecordRow  # noqa: F401
from farmlog.models.task import TaskRow  # noqa: F401
