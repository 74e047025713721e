"""Timed multiple-choice trivia rounds driven by CSV question files."""
