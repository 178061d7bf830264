"""Meetings domain - Meetings, spreadsheet exports and minutes of meeting"""
