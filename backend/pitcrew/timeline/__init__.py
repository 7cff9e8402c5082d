"""
Interactive timeline (Gantt) scheduling.

- hierarchy: milestone -> task grouping
- layout: bar descriptors (dates, progress, visual class)
- interaction: drag/click disambiguation, refresh suppression, writes
- viewport: zoom levels, column width, navigation
- renderer: column grid and bar geometry
- scheduler: one open timeline view composed from the above
- sessions: registry of open views
"""
