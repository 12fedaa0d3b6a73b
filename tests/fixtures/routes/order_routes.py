from routing import RouteBuilder


def is_priority(exchange):
    return exchange.headers.get("priority") == "high"


class OrderRoutes(RouteBuilder):
    def configure(self):
        self.on_exception(ValueError).handled(True).to("log:errors")

        self.from_("direct:orders").route_id("orders").to("mock:audit") \
            .choice() \
                .when(is_priority).to("mock:fast") \
                .otherwise().to("mock:slow") \
            .end()
