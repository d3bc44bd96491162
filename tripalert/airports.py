"""Static catalog of the airports known to the simulated sources."""

from __future__ import annotations

from typing import List, Optional

from .models import Airport

AIRPORTS: tuple[Airport, ...] = (
    Airport("Argentina", "Neuquén", "NQN", "Presidente Perón International Airport"),
    Airport("Argentina", "Buenos Aires", "EZE", "Ministro Pistarini International Airport (Ezeiza)"),
    Airport("Argentina", "Buenos Aires", "AEP", "Jorge Newbery Airfield"),
    Airport("Argentina", "Córdoba", "COR", "Ingeniero Ambrosio Taravella International Airport"),
    Airport("Argentina", "Mendoza", "MDZ", "El Plumerillo International Airport"),
    Airport("Argentina", "Bariloche", "BRC", "Teniente Luis Candelaria International Airport"),
    Airport("Argentina", "Salta", "SLA", "Martín Miguel de Güemes International Airport"),
    Airport("Brazil", "São Paulo", "GRU", "Guarulhos International Airport"),
    Airport("Brazil", "São Paulo", "CGH", "Congonhas Airport"),
    Airport("Brazil", "Rio de Janeiro", "GIG", "Galeão International Airport"),
    Airport("Brazil", "Rio de Janeiro", "SDU", "Santos Dumont Airport"),
    Airport("Chile", "Santiago", "SCL", "Arturo Merino Benítez International Airport"),
    Airport("Uruguay", "Montevideo", "MVD", "Carrasco International Airport"),
    Airport("Paraguay", "Asunción", "ASU", "Silvio Pettirossi International Airport"),
    Airport("Peru", "Lima", "LIM", "Jorge Chávez International Airport"),
    Airport("United States", "New York", "JFK", "John F. Kennedy International Airport"),
    Airport("United States", "New York", "LGA", "LaGuardia Airport"),
    Airport("United States", "Miami", "MIA", "Miami International Airport"),
    Airport("United States", "Los Angeles", "LAX", "Los Angeles International Airport"),
    Airport("United States", "Orlando", "MCO", "Orlando International Airport"),
    Airport("Spain", "Madrid", "MAD", "Adolfo Suárez Madrid-Barajas Airport"),
    Airport("Spain", "Barcelona", "BCN", "Josep Tarradellas Barcelona-El Prat Airport"),
    Airport("Spain", "Seville", "SVQ", "Seville Airport"),
    Airport("Spain", "Valencia", "VLC", "Valencia Airport"),
    Airport("United Kingdom", "London", "LHR", "Heathrow Airport"),
    Airport("United Kingdom", "London", "LGW", "Gatwick Airport"),
    Airport("France", "Paris", "CDG", "Charles de Gaulle Airport"),
    Airport("France", "Paris", "ORY", "Paris-Orly Airport"),
    Airport("Italy", "Rome", "FCO", "Rome-Fiumicino Airport"),
    Airport("Italy", "Milan", "MXP", "Milan-Malpensa Airport"),
    Airport("Germany", "Berlin", "BER", "Berlin Brandenburg Airport"),
    Airport("Germany", "Frankfurt", "FRA", "Frankfurt Airport"),
    Airport("Netherlands", "Amsterdam", "AMS", "Amsterdam Airport Schiphol"),
    Airport("Turkey", "Istanbul", "IST", "Istanbul Airport"),
    Airport("United Arab Emirates", "Dubai", "DXB", "Dubai International Airport"),
    Airport("Qatar", "Doha", "DOH", "Hamad International Airport"),
    Airport("Australia", "Sydney", "SYD", "Sydney Kingsford Smith Airport"),
    Airport("Japan", "Tokyo", "HND", "Haneda Airport"),
    Airport("Japan", "Tokyo", "NRT", "Narita International Airport"),
    Airport("China", "Beijing", "PEK", "Beijing Capital International Airport"),
    Airport("China", "Shanghai", "PVG", "Shanghai Pudong International Airport"),
    Airport("Mexico", "Mexico City", "MEX", "Benito Juárez International Airport"),
    Airport("Colombia", "Bogotá", "BOG", "El Dorado International Airport"),
    Airport("Panama", "Panama City", "PTY", "Tocumen International Airport"),
    Airport("Costa Rica", "San José", "SJO", "Juan Santamaría International Airport"),
    Airport("Canada", "Toronto", "YYZ", "Toronto Pearson International Airport"),
    Airport("Canada", "Vancouver", "YVR", "Vancouver International Airport"),
    Airport("South Africa", "Cape Town", "CPT", "Cape Town International Airport"),
    Airport("Egypt", "Cairo", "CAI", "Cairo International Airport"),
    Airport("Thailand", "Bangkok", "BKK", "Suvarnabhumi Airport"),
    Airport("Singapore", "Singapore", "SIN", "Singapore Changi Airport"),
    Airport("New Zealand", "Auckland", "AKL", "Auckland Airport"),
    Airport("Portugal", "Lisbon", "LIS", "Humberto Delgado Airport"),
    Airport("Portugal", "Porto", "OPO", "Francisco Sá Carneiro Airport"),
    Airport("Greece", "Athens", "ATH", "Athens International Airport Eleftherios Venizelos"),
    Airport("Switzerland", "Zurich", "ZRH", "Zurich Airport"),
    Airport("Switzerland", "Geneva", "GVA", "Geneva Airport"),
    Airport("United Arab Emirates", "Abu Dhabi", "AUH", "Abu Dhabi International Airport"),
    Airport("India", "Delhi", "DEL", "Indira Gandhi International Airport"),
    Airport("India", "Mumbai", "BOM", "Chhatrapati Shivaji Maharaj International Airport"),
    Airport("South Korea", "Seoul", "ICN", "Incheon International Airport"),
    Airport("United States", "San Francisco", "SFO", "San Francisco International Airport"),
    Airport("United States", "Chicago", "ORD", "O'Hare International Airport"),
    Airport("United States", "Dallas", "DFW", "Dallas/Fort Worth International Airport"),
    Airport("United States", "Atlanta", "ATL", "Hartsfield-Jackson Atlanta International Airport"),
)


def find_by_city(city: str) -> List[Airport]:
    """Return all airports serving *city* (case-insensitive)."""
    key = city.strip().casefold()
    return [a for a in AIRPORTS if a.city.casefold() == key]


def find_by_code(code: str) -> Optional[Airport]:
    """Return the airport with IATA *code* or ``None``."""
    key = code.strip().upper()
    for airport in AIRPORTS:
        if airport.code == key:
            return airport
    return None


__all__ = ["AIRPORTS", "find_by_city", "find_by_code"]
