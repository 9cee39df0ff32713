"""Sketch identification backend"""
