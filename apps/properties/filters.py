"""FilterSet definitions for property listing."""

from __future__ import annotations

import django_filters  # type: ignore

from .models import Property


class PropertyFilterSet(django_filters.FilterSet):
    """FilterSet for Property with the filters used by the listing page."""

    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    property_type = django_filters.CharFilter(field_name="property_type", lookup_expr="iexact")

    bedrooms_min = django_filters.NumberFilter(field_name="bedrooms", lookup_expr="gte")
    price_min = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="gte")
    price_max = django_filters.NumberFilter(field_name="price_per_night", lookup_expr="lte")
    is_bookable = django_filters.BooleanFilter(field_name="is_bookable")

    # CSV of feature labels, requires all of them
    features = django_filters.CharFilter(method="filter_features")

    class Meta:
        model = Property
        fields = [
            "location",
            "property_type",
            "is_bookable",
        ]

    def filter_features(self, queryset, name, value):  # type: ignore
        wanted = [item.strip().lower() for item in str(value).split(",") if item.strip()]
        if not wanted:
            return queryset
        matching = [
            obj.pk
            for obj in queryset
            if set(wanted) <= {str(feature).lower() for feature in obj.features or []}
        ]
        return queryset.filter(pk__in=matching)
