"""Infinite monkey theorem: evolve random printable text toward a target phrase."""

from problems.monkeys.fitness import TARGET_TEXT, Monkey, TextFitness, as_text

__all__ = ["TARGET_TEXT", "Monkey", "TextFitness", "as_text"]
