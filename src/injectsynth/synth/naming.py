"""Parameter naming rules for injected fields."""


def _lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def parameter_name_for(field_name: str) -> str:
    """Derive a parameter name from a field name.

    A leading ``_`` or ``m_`` is dropped (the single underscore is checked
    first), then the first remaining character is lower-cased:

        _foo -> foo, m_bar -> bar, Baz -> baz

    Callers must reject an empty field name before calling this.
    """
    if field_name.startswith("_"):
        return _lower_first(field_name[1:])
    if field_name.startswith("m_"):
        return _lower_first(field_name[2:])
    return _lower_first(field_name)
