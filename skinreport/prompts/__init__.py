"""Prompt exports."""

from skinreport.prompts.prompts import SKIN_ANALYSIS_PROMPT, build_analysis_messages

__all__ = ["SKIN_ANALYSIS_PROMPT", "build_analysis_messages"]
