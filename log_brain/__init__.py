"""Group lager log entries and build anchored milestone timelines."""
