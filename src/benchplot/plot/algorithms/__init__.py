"""Algorithms used by chart assembly.

Pure numpy implementations of the geometry behind every chart: unit scale
selection, curve interpolation and windowing, and outlier partitioning.
"""
