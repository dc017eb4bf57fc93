"""
Quiz Conquest: real-time multi-player territory conquest decided by trivia duels.
"""
