"""Blood pressure journal analysis.

Turns a journal snapshot (readings plus lifestyle entries) into a single
analysis report. The engine is pure computation; the optional text
enhancement layer lives in `health_journal.services.enhancement`.
"""
