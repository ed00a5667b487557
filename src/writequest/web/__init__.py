"""Web API for WriteQuest."""
