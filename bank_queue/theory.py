"""
Closed-form M/M/1 results.
Rates are per minute; times are returned in seconds to match the engine clock.
"""

import math
from typing import Dict
from bank_queue.errors import check_rate


def _rate_gap_per_second(arrival_rate: float, service_rate: float) -> float:
    """μ - λ in customers per second."""
    return (check_rate("service_rate", service_rate) - check_rate("arrival_rate", arrival_rate)) / 60.0


def traffic_intensity(arrival_rate: float, service_rate: float) -> float:
    """ρ = λ / μ."""
    return check_rate("arrival_rate", arrival_rate) / check_rate("service_rate", service_rate)


def is_stable(arrival_rate: float, service_rate: float) -> bool:
    """The queue has a steady state only when ρ < 1."""
    return traffic_intensity(arrival_rate, service_rate) < 1.0


def expected_wait_in_queue(arrival_rate: float, service_rate: float) -> float:
    """Wq = ρ / (μ - λ), in seconds.

    Returns:
        Mean wait before service, math.inf when unstable
    """
    rho = traffic_intensity(arrival_rate, service_rate)
    if rho >= 1.0:
        return math.inf
    return rho / _rate_gap_per_second(arrival_rate, service_rate)


def expected_time_in_system(arrival_rate: float, service_rate: float) -> float:
    """W = 1 / (μ - λ), in seconds."""
    if not is_stable(arrival_rate, service_rate):
        return math.inf
    return 1.0 / _rate_gap_per_second(arrival_rate, service_rate)


def expected_queue_length(arrival_rate: float, service_rate: float) -> float:
    """Lq = ρ² / (1 - ρ)."""
    rho = traffic_intensity(arrival_rate, service_rate)
    if rho >= 1.0:
        return math.inf
    return rho * rho / (1.0 - rho)


def expected_number_in_system(arrival_rate: float, service_rate: float) -> float:
    """L = ρ / (1 - ρ)."""
    rho = traffic_intensity(arrival_rate, service_rate)
    if rho >= 1.0:
        return math.inf
    return rho / (1.0 - rho)


def summary(arrival_rate: float, service_rate: float) -> Dict[str, float]:
    """All theoretical quantities in one dict."""
    rho = traffic_intensity(arrival_rate, service_rate)
    return {
        "traffic_intensity": rho,
        "stable": rho < 1.0,
        "utilization": min(rho, 1.0),
        "expected_wait": expected_wait_in_queue(arrival_rate, service_rate),
        "expected_sojourn": expected_time_in_system(arrival_rate, service_rate),
        "expected_queue_length": expected_queue_length(arrival_rate, service_rate),
        "expected_number_in_system": expected_number_in_system(arrival_rate, service_rate),
    }
