"""Handle layer domain: lifecycle states, engine values, guard and translator."""
