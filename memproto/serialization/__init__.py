"""Payload serialization for memproto."""

from .serializers import JsonSerializer, PickleSerializer, Serializer

__all__ = ["JsonSerializer", "PickleSerializer", "Serializer"]
