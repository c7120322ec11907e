"""
Academy Catalog Package

Quiz/exam definitions (sources) and the question bank they draw from.

Features:
- Question bank with answer keys and point values
- Quiz and exam definitions with duration, sample size and availability window
- Soft deletion: sessions keep referencing deleted sources
- Question sampling into immutable snapshots for new sessions

Struktur:
- models.py: Question, Quiz
- services.py: SourceCatalog

Author: Academy Development Team
Version: 1.0.0
"""
