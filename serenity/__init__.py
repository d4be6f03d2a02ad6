"""Serenity streaming chat and journal drift backend."""
