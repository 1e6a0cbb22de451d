"""Exchange formats: IFC and plan-view images."""
