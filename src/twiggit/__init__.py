"""Manage git worktrees across a directory of projects."""
