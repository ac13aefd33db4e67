"""Topic expansion into subtopics."""

from .topic_expander import TopicExpander

__all__ = ["TopicExpander"]
