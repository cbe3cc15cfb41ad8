"""
CLI de olcsync (typer + rich).
"""
