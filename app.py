#!/usr/bin/env python3

import aws_cdk as cdk

from flight_booking_saga_stack import FlightBookingSagaStack

app = cdk.App()
FlightBookingSagaStack(
    app,
    "FlightBookingSagaStack",
)

app.synth()
