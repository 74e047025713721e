from .app import ChallengeApp, QuestionCard

__all__ = ["ChallengeApp", "QuestionCard"]
