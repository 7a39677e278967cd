"""
workshop_modules -- service facades over the engines and the kernel.

Sub-packages:
    payroll   -- pay-period calculation, payroll runs, payment confirmation
    calendar  -- month views of scheduled missions
"""
