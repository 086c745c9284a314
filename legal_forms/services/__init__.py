"""Document engine services"""
