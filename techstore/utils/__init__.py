"""Alerts, exports, imports and PDF reports"""
