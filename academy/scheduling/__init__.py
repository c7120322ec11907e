"""
Academy Scheduling Package

Durable, time-based job queue backed by a database table and a polling
worker. Jobs survive process restarts; a conditional claim on the job row
keeps two workers from running the same job.

Struktur:
- models.py: ScheduledTask (job table)
- task_types.py: ScheduledTaskType
- scheduler.py: TaskScheduler (schedule, cancel, claim, polling loop)

Author: Academy Development Team
Version: 1.0.0
"""
