"""FilterSet definitions for the review feed."""

from __future__ import annotations

import django_filters  # type: ignore

from apps.properties.models import Property

from .models import Review


class ReviewFilterSet(django_filters.FilterSet):
    """Narrow the feed to one property; moderators may also filter by status."""

    property = django_filters.ModelChoiceFilter(queryset=Property.objects.all())
    status = django_filters.ChoiceFilter(choices=Review.Status.choices, method="filter_status")

    class Meta:
        model = Review
        fields = ["property", "status"]

    def filter_status(self, queryset, name, value):  # type: ignore
        user = getattr(self.request, "user", None)
        if not getattr(user, "is_staff", False):
            return queryset
        return queryset.filter(status=value)
