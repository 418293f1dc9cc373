"""Routing — ordered route table with first-match-wins dispatch.

Routes are registered during startup and only read while serving.
"""
