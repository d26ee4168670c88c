# Unidades por momento Furuno
MOMENT_UNITS = {
    "R": "mm/h",
    "REF": "dBZ",
    "VEL": "m/s",
    "ZDR": "dB",
    "KDP": "deg/km",
    "PHI": "deg",
    "RHO": "",
    "SW": "m/s",
}

MOMENT_DESCRIPTIONS = {
    "R": "Rainfall intensity",                 # Intensidad de lluvia
    "REF": "Reflectivity",                     # Reflectividad horizontal
    "VEL": "Doppler velocity",                 # Velocidad radial
    "ZDR": "Differential reflectivity",        # Reflectividad diferencial
    "KDP": "Specific differential phase",      # Fase diferencial específica
    "PHI": "Differential phase",               # Fase diferencial
    "RHO": "Co-polar correlation coefficient", # Correlación cruzada
    "SW": "Doppler spectrum width",            # Ancho espectral
}

# Nombres estándar de Py-ART (usados como standard_name del campo)
PYART_FIELD_NAMES = {
    "R": "radar_estimated_rain_rate",
    "REF": "reflectivity",
    "VEL": "velocity",
    "ZDR": "differential_reflectivity",
    "KDP": "specific_differential_phase",
    "PHI": "differential_phase",
    "RHO": "cross_correlation_ratio",
    "SW": "spectrum_width",
}

# Nombre por defecto del radar en el modelo de salida
DEFAULT_RADAR_NAME = "FWLX"
