"""Rules domain - rule and knowledge base models."""

from rulekit.rules.schemas import Action, Condition, KnowledgeBase, Rule

__all__ = ["Rule", "KnowledgeBase", "Condition", "Action"]
