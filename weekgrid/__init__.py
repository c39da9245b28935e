"""
WeekGrid – weekly schedule editor (event model + grid layout engine).
"""
